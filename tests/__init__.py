"""
shelfwise test suite

Tests are organized by layer:
- test_location_hierarchy.py: shelf ancestry checks
- test_inventory_adjustment.py / test_placement_service.py: ledger services
- test_bulk_inward_*.py / test_write_batch.py: spreadsheet import pipeline
- test_inventory_routes.py / test_management.py: HTTP and CLI surfaces
"""
