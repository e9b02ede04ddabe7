"""
Centralized Error Messages

Single source of truth for user-facing error strings returned by the stock
ledger API and written into bulk import result files.

Usage:
    from shelfwise.utils.error_messages import ErrorMessages as EM

    raise ValidationError(EM.DEDUCTION_EXCEEDS_STOCK.format(amount=5, stock=3))
"""


class ErrorMessages:
    """User-facing error messages - never contain HTML or special characters"""

    # ==================== AUTHENTICATION & AUTHORIZATION ====================
    AUTH_REQUIRED = "User not logged in"
    BUSINESS_ID_REQUIRED = "businessId is required"
    BUSINESS_NOT_FOUND = "Business not found"
    BUSINESS_ACCESS_DENIED = "You are not an active member of this business"
    RATE_LIMITED = "Too many requests: {limit}"
    SERVICE_UNAVAILABLE = "Service temporarily unavailable. Please try again shortly."

    # ==================== ADJUSTMENT INPUT ====================
    BUSINESS_ID_INVALID = "businessId is required and must be a string"
    SKU_INVALID = "sku is required and must be a string"
    TYPE_INVALID = 'type must be either "inward" or "deduction"'
    AMOUNT_INVALID = "amount must be a positive integer"
    AMOUNT_TOO_LARGE = "amount must not exceed {limit}"
    LIMIT_INVALID = "limit must be a positive integer"
    UNEXPECTED_ERROR = "An unexpected error occurred"
    PLACEMENT_INVALID = "placement must be an object"
    PLACEMENT_SHELF_REQUIRED = "placement.shelfCode is required for inward placement"
    PLACEMENT_ID_REQUIRED = "placement.placementId is required for deduction from a placement"

    # ==================== INVENTORY ====================
    PRODUCT_NOT_FOUND = 'Product with SKU "{sku}" not found'
    DEDUCTION_EXCEEDS_STOCK = (
        "Cannot deduct {amount} units. Current physical stock is {stock}. "
        "Maximum deductible: {ceiling}"
    )
    PLACEMENT_NOT_FOUND = 'Placement "{placement_id}" not found'
    PLACEMENT_PRODUCT_MISMATCH = 'Placement "{placement_id}" does not hold SKU "{sku}"'
    PLACEMENT_INSUFFICIENT = (
        "Cannot deduct {amount} units. Only {available} available at this location."
    )
    LOCATION_NOT_FOUND = '{kind} entity "{code}" does not exist'
    SHELF_PATH_MISMATCH = "Shelf path mismatch: {details}"
    ADJUSTMENT_FAILED = "Inventory adjustment could not be saved. No changes were made."

    # ==================== BULK INWARD ====================
    FILE_REQUIRED = "No file uploaded"
    FILE_TOO_LARGE = "Uploaded file is too large"
    FILE_TYPE_INVALID = "File must be an Excel (.xlsx, .xls) or CSV (.csv) file"
    FILE_UNREADABLE = "File could not be read: {reason}"
    FILE_STRUCTURE_INVALID = "Invalid file structure"
    FILE_EMPTY = "File is empty or has no valid data rows"
    CSV_TOO_SHORT = "CSV file must have at least a header row and one data row"
    MISSING_COLUMN = "Missing required column: {column}"
    ROW_FIELD_REQUIRED = "Row {row}: {column} is required"
    ROW_QUANTITY_INVALID = "Row {row}: Business Product Quantity must be a positive whole number"
    ROW_QUANTITY_TOO_LARGE = "Row {row}: Business Product Quantity must not exceed {limit}"
    ROW_PRODUCT_NOT_FOUND = 'Business Product "{sku}" does not exist'
    ROW_NOT_COMMITTED = "Not committed: {reason}"
    ROW_NOT_PROCESSED = "Not processed: import aborted after a failed commit"
    ROW_DRY_RUN = "Dry run: placement \"{placement_id}\" would receive {quantity} units"
