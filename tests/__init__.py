"""
State Oil Production Test Suite

- oil_production/test_request.py — request builder, HTTP wrapper, config
- oil_production/test_normalize.py — payload normalization
- oil_production/test_fetch.py — batch fetch and failure isolation
- oil_production/test_prepare.py — post-processing fail-loud gates
- oil_production/test_validate_summary.py — validation, aggregations, export
- oil_production/test_pipeline.py — end-to-end run and CLI
"""
