"""Configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Matching
    match_threshold: int = 5
    placeholder_marker: str = "Default transaction - please replace with actual data"

    # Optional JSON rule set replacing the built-in vendor/GL tables
    rules_file: str = ""

    # Output defaults
    cash_account: str = "10000"
    unknown_gl_account: str = "99999"

    # Batch bounds enforced at the API boundary
    max_bank_transactions: int = 5000
    max_ledger_transactions: int = 20000

    class Config:
        env_prefix = ""
        case_sensitive = False


settings = Settings()


# Output period buckets - (date marker test, period-end date, fiscal period)
DECEMBER_PERIOD_END = "12/31/2024"
DECEMBER_PERIOD = "26"
JANUARY_PERIOD_END = "1/31/2025"
JANUARY_PERIOD = "27"

# Ledger/upload header - column name to record field
LEDGER_COLUMNS = {
    "Vendor ID": "vendor_id",
    "Vendor Name": "vendor_name",
    "Check Name": "check_name",
    "Check Address-Line One": "check_address_line1",
    "Check Address-Line Two": "check_address_line2",
    "Check City": "check_city",
    "Check State": "check_state",
    "Check Zipcode": "check_zipcode",
    "Check Country": "check_country",
    "Check Number": "check_number",
    "Date": "date",
    "Memo": "memo",
    "Cash Account": "cash_account",
    "Total Paid on Invoice(s)": "total_paid",
    "Discount Account": "discount_account",
    "Prepayment": "prepayment",
    "Customer Payment": "customer_payment",
    "AP Date Cleared in Bank Rec": "ap_date_cleared",
    "Detailed Payments": "detailed_payments",
    "Number of Distributions": "number_of_distributions",
    "Invoice Paid": "invoice_paid",
    "Discount Amount": "discount_amount",
    "Quantity": "quantity",
    "Stocking Quantity": "stocking_quantity",
    "Item ID": "item_id",
    "Serial Number": "serial_number",
    "U/M ID": "um_id",
    "U/M No. of Stocking Units": "um_no_of_stocking_units",
    "Description": "description",
    "G/L Account": "gl_account",
    "Unit Price": "unit_price",
    "Stocking Unit Price": "stocking_unit_price",
    "UPC / SKU": "upc_sku",
    "Weight": "weight",
    "Amount": "amount",
    "Job ID": "job_id",
    "Used for Reimbursable Expense": "used_for_reimbursable_expense",
    "Transaction Period": "transaction_period",
    "Transaction Number": "transaction_number",
    "Voided by Transaction": "voided_by_transaction",
    "Recur Number": "recur_number",
    "Recur Frequency": "recur_frequency",
    "Payment Method": "payment_method",
}

LEDGER_HEADER = list(LEDGER_COLUMNS)
