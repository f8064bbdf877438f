import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration"""

    # Flask settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '5000'))

    # Money settings
    CURRENCY_UNIT = Decimal(os.getenv('CURRENCY_UNIT', '0.01'))
    DEFAULT_CURRENCY = os.getenv('DEFAULT_CURRENCY', '₹')

    # Ledger owner, implicitly a member of every group
    OWNER_ID = os.getenv('OWNER_ID', '1')
    OWNER_NAME = os.getenv('OWNER_NAME', 'You')

    # Application settings
    MAX_PARTICIPANTS = 50
    MIN_AMOUNT = Decimal('0.01')
    MAX_AMOUNT = Decimal('1000000')
