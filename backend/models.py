from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Any, Optional, Dict
from datetime import datetime, timezone
from enum import Enum
import uuid

# ============================================================================
# ENUMS (System Constants)
# ============================================================================

class DocumentType(str, Enum):
    """Smart Docs document types."""
    NVIS = "NVIS"
    BILL_OF_SALE = "BillOfSale"

class HistoryDocumentType(str, Enum):
    """Document types stored in the generated document history."""
    NVIS = "NVIS"
    BILL_OF_SALE = "BillOfSale"
    VIN_LABEL = "VIN Label"

class LabelTemplate(str, Enum):
    STANDARD = "standard"
    BILINGUAL_CANADIAN = "bilingual_canadian"
    BILINGUAL_RV_CANADIAN = "bilingual_rv_canadian"

class ExportFormat(str, Enum):
    TXT = "txt"
    PDF = "pdf"
    DOCX = "docx"

class WebhookEventStatus(str, Enum):
    PROCESSING = "PROCESSING"
    PROCESSED = "PROCESSED"
    FAILED = "FAILED"

SMART_DOCS_OPTIONS = [
    {"value": DocumentType.NVIS.value, "label": "NVIS Certificate"},
    {"value": DocumentType.BILL_OF_SALE.value, "label": "Bill of Sale"},
]

COMPLIANCE_CHECK_DOC_TYPES = [
    {"value": "VIN Label", "label": "VIN Label"},
    {"value": "NVIS Certificate", "label": "NVIS Certificate"},
    {"value": "Bill of Sale", "label": "Bill of Sale"},
    {"value": "Other Vehicle Document", "label": "Other Related Document"},
]

# ============================================================================
# USERS & CLAIMS
# ============================================================================

class CustomClaims(BaseModel):
    """Boolean claims attached to a user identity."""
    model_config = ConfigDict(extra="ignore")

    premium: bool = False
    admin: bool = False


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: EmailStr
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    password_hash: str
    disabled: bool = False
    email_verified: bool = False
    claims: CustomClaims = Field(default_factory=CustomClaims)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_sign_in_at: Optional[datetime] = None

    @property
    def is_premium(self) -> bool:
        return self.claims.premium is True

    @property
    def is_admin(self) -> bool:
        return self.claims.admin is True


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    display_name: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Safe user response (no password hash)."""
    user_id: str
    email: str
    display_name: Optional[str] = None
    email_verified: bool
    is_premium: bool
    is_admin: bool
    created_at: datetime
    last_sign_in_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class AdminUser(BaseModel):
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    disabled: bool
    email_verified: bool
    creation_time: str
    last_sign_in_time: Optional[str] = None
    is_premium: bool
    is_admin: bool


class DashboardStats(BaseModel):
    total_users: int
    total_documents: int
    premium_users: int


class ClaimsUpdateRequest(BaseModel):
    premium: Optional[bool] = None
    admin: Optional[bool] = None

# ============================================================================
# FLOW INPUTS
# ============================================================================

def _exact_vin_length(value: str) -> str:
    if len(value) != 17:
        raise ValueError("VIN must be exactly 17 characters long.")
    return value


class SmartDocsRequest(BaseModel):
    document_type: DocumentType
    vin: str
    trailer_specs: str = Field(min_length=10)
    tone: Optional[str] = None

    @field_validator("vin")
    @classmethod
    def check_vin_length(cls, value: str) -> str:
        return _exact_vin_length(value)


class LabelForgeRequest(BaseModel):
    template: LabelTemplate
    vin_data: str
    trailer_specs: str = Field(min_length=1)
    regulatory_standards: Optional[str] = None
    label_dimensions: str = Field(min_length=3)

    @field_validator("vin_data")
    @classmethod
    def check_vin_length(cls, value: str) -> str:
        return _exact_vin_length(value)


class ComplianceCheckRequest(BaseModel):
    document_type: str = Field(min_length=1)
    document_content: str = Field(min_length=10)
    target_regulations: str = Field(min_length=1)
    country_of_operation: str = Field(min_length=1)


class DecodeVinRequest(BaseModel):
    vin: str

    @field_validator("vin")
    @classmethod
    def check_vin_length(cls, value: str) -> str:
        return _exact_vin_length(value)


class ValidateVinRequest(BaseModel):
    """Deterministic check; any string is accepted."""
    vin: str

# ============================================================================
# FLOW OUTPUTS
# ============================================================================

class VinPart(BaseModel):
    value: str
    description: str


class VinDescriptor(VinPart):
    trailer_type: str
    body_type: str
    body_length: str
    number_of_axles: str


class DecodeVinOutput(BaseModel):
    wmi: VinPart
    vehicle_descriptors: VinDescriptor
    check_digit: VinPart
    model_year: VinPart
    plant: VinPart
    sequential_number: VinPart
    full_vin: str


class DecodeVinResponse(DecodeVinOutput):
    is_check_digit_valid: bool
    decoded_model_year: str


class VehicleInfo(BaseModel):
    """Baseline vehicle specification returned by the VIN lookup."""
    make: str
    model: str
    year: str
    body_type: str
    gvwr: str
    number_of_axles: str
    tire_size: str


class NvisData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    manufacturer_name: str
    manufacturer_address: str
    make: str
    model: str
    year: str
    body_type: str
    gvwr: str
    gawr: str
    number_of_axles: str
    tire_size: str
    rim_size: str
    dimensions: str
    date_of_manufacture: str


class BillOfSaleData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    seller_name: str
    seller_address: str
    buyer_name: str
    buyer_address: str
    sale_date: str
    sale_price: str
    make: str
    model: str
    year: str
    body_type: str
    color: Optional[str] = None


class GenerateDocumentationOutput(BaseModel):
    structured_data: Dict[str, Any]
    document_text: str


class GenerateDocumentationResponse(GenerateDocumentationOutput):
    document_id: Optional[str] = None


class VinLabelData(BaseModel):
    is_vin_valid: bool
    label_data: Dict[str, str]
    placement_rationale: str


class SaveLabelRequest(BaseModel):
    vin: str
    label_data: Dict[str, str]
    image_data_uri: Optional[str] = None

    @field_validator("vin")
    @classmethod
    def check_vin_length(cls, value: str) -> str:
        return _exact_vin_length(value)


class CheckComplianceOutput(BaseModel):
    compliance_status: str
    compliance_report: str

# ============================================================================
# DOCUMENT HISTORY
# ============================================================================

class GeneratedDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    document_id: str = Field(default_factory=lambda: f"GD-{uuid.uuid4().hex[:12].upper()}")
    user_id: str
    document_type: str
    vin: str
    content: str
    image_data_uri: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DocumentAnalyticsDay(BaseModel):
    date: str
    nvis: int = 0
    bill_of_sale: int = 0
    vin_label: int = 0


class DeleteResult(BaseModel):
    success: bool


class BillingInfo(BaseModel):
    plan: str
    is_premium: bool
    is_admin: bool
    checkout_url: Optional[str] = None
    customer_portal_url: Optional[str] = None


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event_id: str
    event_name: str
    status: WebhookEventStatus = WebhookEventStatus.PROCESSING
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    processed_at: Optional[datetime] = None
    error: Optional[str] = None

