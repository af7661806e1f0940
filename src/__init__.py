"""
State Oil Production - EIA monthly crude oil field production by state

Modules:
- oil_production: fetch, normalize, clean and export the per-state dataset
"""
