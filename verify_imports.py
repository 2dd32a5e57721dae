import sys
import os

# Add project root to path
sys.path.append(os.getcwd())

print("Verifying imports...")

try:
    print("Importing jobtracker.api.main...")
    from jobtracker.api import main
    print("✅ jobtracker.api.main imported")

    print("Importing jobtracker.api.applications...")
    from jobtracker.api import applications
    print("✅ jobtracker.api.applications imported")

    print("Importing jobtracker.api.live...")
    from jobtracker.api import live
    print("✅ jobtracker.api.live imported")

    print("🚀 All imports successful!")

except Exception as e:
    print(f"❌ Import failed: {e}")
    sys.exit(1)
