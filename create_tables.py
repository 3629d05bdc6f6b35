from scoredrill.db.base import Base
from scoredrill.db.session import engine
from scoredrill.db.models.spot import PracticeLogRecord, SpotRecord

if __name__ == "__main__":
    print("Creating tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created.")
