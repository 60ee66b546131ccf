"""
Request/response schemas.

This is the validation boundary: negative or out-of-range prices, quantities
and percentages are rejected here (422) so the pricing engine only ever sees
sane input. The engine still treats anything odd as 0 rather than failing.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from .models import QuoteStatus
from .calculators import CostingMode

MAX_AMOUNT = 1_000_000_000      # per price / estimate / unit price
MAX_QUANTITY = 1_000_000
MAX_PERCENTAGE = 1_000


# --- Settings ---

class ShopSettingsUpdate(BaseModel):
    currency: Optional[str] = Field(None, min_length=1)
    currency_symbol: Optional[str] = Field(None, min_length=1)
    default_complexity_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    default_markup_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    default_tax_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    default_task_price: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT)
    default_material_price: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT)

class ShopSettings(BaseModel):
    currency: str
    currency_symbol: str
    default_complexity_percentage: float
    default_markup_percentage: float
    default_tax_percentage: float
    default_task_price: float
    default_material_price: float
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Customers ---

class CustomerBase(BaseModel):
    name: str
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class CustomerCreate(CustomerBase):
    pass

class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class Customer(CustomerBase):
    id: int
    created_at: datetime
    class Config:
        from_attributes = True


# --- Product categories ---

class ProductCategoryBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None

class ProductCategoryCreate(ProductCategoryBase):
    pass

class ProductCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None

class ProductCategory(ProductCategoryBase):
    id: int
    product_count: int = 0
    created_at: datetime
    class Config:
        from_attributes = True


# --- Products ---

class ProductBase(BaseModel):
    name: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit_price: float = Field(0.0, ge=0, le=MAX_AMOUNT)
    unit: str = "ea"
    sku: Optional[str] = None
    manufacturer: Optional[str] = None
    supplier: Optional[str] = None
    notes: Optional[str] = None

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit_price: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT)
    unit: Optional[str] = None
    sku: Optional[str] = None
    manufacturer: Optional[str] = None
    supplier: Optional[str] = None
    notes: Optional[str] = None

class Product(ProductBase):
    id: int
    created_at: datetime
    class Config:
        from_attributes = True


# --- Materials ---

class MaterialCreate(BaseModel):
    name: Optional[str] = None          # Defaults to the product name
    product_id: Optional[int] = None
    quantity: float = Field(1.0, ge=0, le=MAX_QUANTITY)
    unit_price: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT)  # Defaults to the product price
    notes: Optional[str] = None

class MaterialUpdate(BaseModel):
    name: Optional[str] = None
    product_id: Optional[int] = None
    quantity: Optional[float] = Field(None, ge=0, le=MAX_QUANTITY)
    unit_price: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT)
    notes: Optional[str] = None


# --- Tasks ---

class TaskCreate(BaseModel):
    description: str
    price: float = Field(0.0, ge=0, le=MAX_AMOUNT)
    position: Optional[int] = None
    material_costing_mode: CostingMode = CostingMode.LUMP_SUM
    lump_sum_estimate: float = Field(0.0, ge=0, le=MAX_AMOUNT)   # lump_sum only
    materials: List[MaterialCreate] = []          # itemized only

class TaskUpdate(BaseModel):
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT)
    position: Optional[int] = None
    material_costing_mode: Optional[CostingMode] = None
    lump_sum_estimate: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT)


# --- Quotes ---

class QuoteCreate(BaseModel):
    customer_id: int
    title: str
    notes: Optional[str] = None
    valid_until: Optional[datetime] = None
    complexity_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    markup_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    tax_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    tasks: List[TaskCreate] = []

class QuoteUpdate(BaseModel):
    customer_id: Optional[int] = None
    title: Optional[str] = None
    notes: Optional[str] = None
    valid_until: Optional[datetime] = None

class StatusUpdate(BaseModel):
    status: QuoteStatus

class ChargesUpdate(BaseModel):
    complexity_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    markup_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)
    tax_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)

class QuotePreviewRequest(BaseModel):
    """Unsaved quote state, as held by an editing form."""
    tasks: List[TaskCreate] = []
    complexity_percentage: float = Field(0.0, ge=0, le=MAX_PERCENTAGE)
    markup_percentage: float = Field(0.0, ge=0, le=MAX_PERCENTAGE)
    tax_percentage: Optional[float] = Field(None, ge=0, le=MAX_PERCENTAGE)

class QuoteTotals(BaseModel):
    subtotal_tasks: float
    subtotal_materials: float
    subtotal_combined: float
    complexity_charge: float
    markup_charge: float
    grand_total: float
    tax_charge: float
    total_with_tax: float
