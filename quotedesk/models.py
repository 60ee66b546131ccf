from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
from .calculators import CostingMode
import enum


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    company = Column(String)
    email = Column(String)
    phone = Column(String)
    address = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quotes = relationship("Quote", back_populates="customer")


class ProductCategory(Base):
    __tablename__ = "product_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    products = relationship("Product", back_populates="category")


class Product(Base):
    """Catalog entry — prefills name and unit price on itemized material lines."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    category_id = Column(
        Integer, ForeignKey("product_categories.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    unit_price = Column(Float, nullable=False, default=0.0)
    unit = Column(String, default="ea")
    sku = Column(String, nullable=True)
    manufacturer = Column(String, nullable=True)
    supplier = Column(String, nullable=True)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("ProductCategory", back_populates="products")


class ShopSettings(Base):
    """
    Single-row shop defaults. New quotes take their charge percentages from
    here; the task and material prices prefill new lines in the editor.
    """
    __tablename__ = "shop_settings"

    id = Column(Integer, primary_key=True, index=True)
    currency = Column(String, nullable=False, default="USD")
    currency_symbol = Column(String, nullable=False, default="$")
    default_complexity_percentage = Column(Float, default=0.0)
    default_markup_percentage = Column(Float, default=10.0)
    default_tax_percentage = Column(Float, default=0.0)
    default_task_price = Column(Float, default=0.0)
    default_material_price = Column(Float, default=0.0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    quote_number = Column(String, unique=True, nullable=False)
    title = Column(String, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    status = Column(Enum(QuoteStatus), default=QuoteStatus.DRAFT)
    notes = Column(Text)
    valid_until = Column(DateTime, nullable=True)

    # Charges (percentages)
    complexity_percentage = Column(Float, default=0.0)
    markup_percentage = Column(Float, default=10.0)
    tax_percentage = Column(Float, nullable=True)

    # Totals, written only by pricing_engine.recalculate_quote_totals()
    subtotal_tasks = Column(Float, default=0.0)
    subtotal_materials = Column(Float, default=0.0)
    subtotal_combined = Column(Float, default=0.0)
    complexity_charge = Column(Float, default=0.0)
    markup_charge = Column(Float, default=0.0)
    grand_total = Column(Float, default=0.0)
    tax_charge = Column(Float, default=0.0)
    total_with_tax = Column(Float, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="quotes")
    tasks = relationship(
        "Task",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="[Task.position, Task.id]",
    )


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("quotes.id"), nullable=False)
    description = Column(String, nullable=False)
    price = Column(Float, default=0.0)  # Labor/service, independent of materials
    position = Column(Integer, default=0)  # Display order only
    material_costing_mode = Column(Enum(CostingMode), default=CostingMode.LUMP_SUM, nullable=False)
    lump_sum_estimate = Column(Float, nullable=True)  # NULL unless lump_sum
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quote = relationship("Quote", back_populates="tasks")
    materials = relationship(
        "Material",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Material.id",
    )


class Material(Base):
    """Itemized material line. Only itemized tasks have rows here."""
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    name = Column(String, nullable=False, default="")
    quantity = Column(Float, default=1.0)  # May be fractional (linear feet, etc.)
    unit_price = Column(Float, default=0.0)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    task = relationship("Task", back_populates="materials")
    product = relationship("Product")
