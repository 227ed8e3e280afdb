# In this file, you can set the configurations of the app.

#config related to logging must have prefix LOG_
LOG_LEVEL = 'INFO'
LOG_TO_FILE = False
LOG_TO_CONSOLE = True
LOG_FOLDER = 'log'

DATA_FOLDER = "data_folder"

# Version history
MAX_VERSIONS = 30
VERSION_STORAGE_KEY_PREFIX = "cv-versions-"
# Word diff falls back to a whole-text replace above this many tokens per side
WORD_DIFF_MAX_TOKENS = 400

# Job tracker
JOB_TRACKER_STORAGE_KEY = "job-tracker"
JOB_TRACKER_MAX_ENTRIES = 200

# Billing
FREEMIUM_JOB_SEARCHES = 1
PRO_JOB_SEARCHES = 10
FREEMIUM_CV_CREATIONS = 1
FREEMIUM_CV_OPTIMIZATIONS = 1

TOKEN_PACKS = {
    "job-search-5": 5,
    "job-search-10": 10,
}

PLANS = {
    "pro-monthly": {"plan_name": "Pro Monthly", "amount": "$19.99", "duration_days": 30},
    "pro-yearly": {"plan_name": "Pro Yearly", "amount": "$79.99", "duration_days": 365},
}
CHECKOUT_PAYMENT_METHOD = "Stripe Checkout"
