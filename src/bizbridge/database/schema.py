from sqlalchemy import Column, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class WeeklyBusinessEntry(Base):
    __tablename__ = "weekly_business_entries"

    record_id = Column(String, primary_key=True)
    week_id = Column(String, nullable=False, index=True)  # YYYY-Www
    entry_date = Column(String, nullable=False)  # YYYY-MM-DD
    category = Column(String)
    topic = Column(String)
    participants = Column(Text)
    summary_content = Column(Text)
    todo_items = Column(Text)
    created_time = Column(String, nullable=False)  # ISO 8601 string
    updated_time = Column(String, nullable=False)  # ISO 8601 string
    created_by = Column(String)
    updated_by = Column(String)


class Company(Base):
    __tablename__ = "companies"

    company_id = Column(String, primary_key=True)
    company_name = Column(String, nullable=False)


class Contact(Base):
    __tablename__ = "contacts"

    contact_id = Column(String, primary_key=True)
    source_id = Column(String)
    name = Column(String, nullable=False)
    company_id = Column(String, index=True)
    department = Column(String)
    job_title = Column(String)
    mobile = Column(String)
    phone = Column(String)
    email = Column(String)
    created_time = Column(String, nullable=False)
    updated_time = Column(String, nullable=False)
    created_by = Column(String)
    updated_by = Column(String)

    __table_args__ = (Index("idx_contacts_name", "name"),)
