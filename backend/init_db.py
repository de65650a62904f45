"""
Initialize database with the OTP table
Run this script once to set up the database
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from otp_gateway.database import engine, Base
from otp_gateway.config import settings
from otp_gateway.models import OTPRecord

def init_database():
    """Create tables"""

    print("=" * 60)
    print(f"{settings.APP_NAME} - Database Initialization")
    print("=" * 60)

    print("\n📦 Creating database tables...")
    try:
        Base.metadata.create_all(bind=engine)
        print(f"✅ Table '{OTPRecord.__tablename__}' ready")
    except Exception as e:
        print(f"❌ Error creating tables: {str(e)}")
        sys.exit(1)

    print("\n🚀 You can now start the backend server:")
    print("   uvicorn otp_gateway.main:app --reload\n")

if __name__ == "__main__":
    init_database()
