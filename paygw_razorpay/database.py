from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from paygw_razorpay import config

_url = config.database_url()
# SQLite connections are handed between FastAPI's worker threads
_connect_args = {"check_same_thread": False} if _url.startswith("sqlite") else {}

engine = create_engine(_url, connect_args=_connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()
