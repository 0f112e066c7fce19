"""
Registry seeding script: inserts sample booking-order containers so that
receive plans can be created against a fresh database.

Usage:
    python seed_containers.py
"""
import uuid
import sys
import os
from datetime import timedelta

# Add the current directory to the system path so Python can find your files
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

try:
    from core.database import SessionLocal, engine, Base
    from core.timeutils import utc_now
    from models.order_container import OrderContainer, CustomsStatus, CargoReleaseStatus
    # Import all models to initialize mappers
    from models.receive_plan import ReceivePlan, PlanContainer
except ImportError as e:
    print(f"❌ Import Error: {e}")
    sys.exit(1)


CONTAINER_SEED = [
    # container_no, type, order, vessel, voyage, extract in days, free storage in days, priority, customs, release
    ("MSCU1234567", "40HC", "ORD-001", "MSC LIGA", "VN001", 3, 5, True, CustomsStatus.HAS_CCP, CargoReleaseStatus.APPROVED),
    ("MSCU7654321", "20GP", "ORD-001", "MSC LIGA", "VN001", 3, 5, False, CustomsStatus.HAS_CCP, CargoReleaseStatus.REQUESTED),
    ("CMAU1112223", "40GP", "ORD-002", "CMA ANTOINE", "VN014", 10, 12, False, CustomsStatus.PENDING_APPROVAL, CargoReleaseStatus.NOT_REQUESTED),
    ("MAEU4445556", "40HC", "ORD-003", "MAERSK ATLAS", "VN220", 20, 25, False, CustomsStatus.REGISTERED, CargoReleaseStatus.NOT_REQUESTED),
    ("ONEU7778889", "20GP", "ORD-004", "ONE CYGNUS", "VN007", 30, 40, False, CustomsStatus.NOT_REGISTERED, CargoReleaseStatus.NOT_REQUESTED),
]


def seed_containers():
    print("📋 Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Database tables created")

    db = SessionLocal()
    now = utc_now()
    try:
        for (container_no, type_code, order_code, vessel, voyage, extract_days,
             free_days, is_priority, customs, release) in CONTAINER_SEED:
            if db.query(OrderContainer).filter(OrderContainer.container_no == container_no).first():
                continue
            db.add(OrderContainer(
                id=uuid.uuid4(),
                container_no=container_no,
                type_code=type_code,
                order_code=order_code,
                vessel_code=vessel,
                voyage=voyage,
                eta=now - timedelta(days=1),
                extract_to=now + timedelta(days=extract_days),
                yard_free_to=now + timedelta(days=free_days),
                is_priority=is_priority,
                customs_status=customs,
                cargo_release_status=release,
            ))
            print(f"✅ Created Container: {container_no} ({order_code})")

        db.commit()
    except Exception as e:
        print(f"❌ Error seeding containers: {e}")
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    seed_containers()
