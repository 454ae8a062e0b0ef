"""
GTOPO30 lookup test suite

Structure:
- unit/: locator, header parser, sampler, config and logging
- integration/: full queries against a synthetic tile directory
- conftest.py: fixtures that write .HDR/.DEM pairs into tmp_path
"""
