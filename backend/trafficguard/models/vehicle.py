"""
Vehicle Data Models

Vehicle registration records as returned by the (mock) RTO lookup.
Owned by the lookup collaborator; embedded by value in scan records.
"""

from pydantic import BaseModel, Field
from typing import Literal


DocumentStatus = Literal['Active', 'Expired', 'Suspended']
VehicleType = Literal['Two Wheeler', 'Four Wheeler', 'Heavy Vehicle']


class VehicleOwner(BaseModel):
    """Registered owner contact details"""
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""


class VehicleDocuments(BaseModel):
    """Registration, insurance and PUC certificate status"""
    rc_status: DocumentStatus = 'Active'
    rc_expiry: str = ""
    insurance_status: DocumentStatus = 'Active'
    insurance_expiry: str = ""
    puc_status: DocumentStatus = 'Active'
    puc_expiry: str = ""

    def expired_documents(self) -> list[str]:
        """Names of documents that are not Active"""
        statuses = {
            'RC': self.rc_status,
            'Insurance': self.insurance_status,
            'PUC': self.puc_status,
        }
        return [name for name, status in statuses.items() if status != 'Active']


class VehicleRecord(BaseModel):
    """
    Vehicle registration record

    The plate may be synthetic (``VIDEO_EVIDENCE``) for detections that
    came from a video clip without a separate lookup.
    """
    plate_number: str
    model: str = "Unknown Vehicle"
    type: VehicleType = 'Four Wheeler'
    owner: VehicleOwner
    documents: VehicleDocuments = Field(default_factory=VehicleDocuments)
    is_stolen: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "plate_number": "MH12DE1433",
                "model": "Honda City",
                "type": "Four Wheeler",
                "owner": {
                    "name": "Rajesh Kumar",
                    "email": "rajesh.k@example.com",
                    "phone": "+919876543210",
                    "address": "Flat 402, Sunshine Apartments, Pune"
                },
                "documents": {
                    "rc_status": "Active",
                    "rc_expiry": "2028-05-20",
                    "insurance_status": "Expired",
                    "insurance_expiry": "2023-12-01",
                    "puc_status": "Active",
                    "puc_expiry": "2024-10-15"
                },
                "is_stolen": False
            }
        }

    def to_prompt_dict(self) -> dict:
        """Camel-cased view used when describing the vehicle to the AI service"""
        docs = self.documents
        return {
            "plateNumber": self.plate_number,
            "model": self.model,
            "type": self.type,
            "isStolen": self.is_stolen,
            "owner": {"name": self.owner.name},
            "documents": {
                "rcStatus": docs.rc_status,
                "rcExpiry": docs.rc_expiry,
                "insuranceStatus": docs.insurance_status,
                "insuranceExpiry": docs.insurance_expiry,
                "pucStatus": docs.puc_status,
                "pucExpiry": docs.puc_expiry,
            },
        }


def video_evidence_vehicle() -> VehicleRecord:
    """Placeholder vehicle for video scans, which skip the registry lookup"""
    return VehicleRecord(
        plate_number="VIDEO_EVIDENCE",
        model="Identified in Video",
        type='Four Wheeler',
        owner=VehicleOwner(name="Unknown"),
        documents=VehicleDocuments(),
        is_stolen=False,
    )
