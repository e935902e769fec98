"""
Pydantic schemas for business and service setup verification
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from uuid import UUID


class SetupSection(BaseModel):
    """Readiness of one area of configuration"""
    is_complete: bool = True
    issues: List[str] = Field(default_factory=list)

    def flag(self, issue: str) -> None:
        self.issues.append(issue)
        self.is_complete = False


class StaffSetupSummary(BaseModel):
    staff_id: UUID
    name: str
    service_count: int
    rule_count: int


class SetupReport(BaseModel):
    business_id: UUID
    service_id: Optional[UUID] = None
    allocation_mode: str
    overall_status: str = "ready"  # 'ready' or 'incomplete'
    sections: Dict[str, SetupSection] = Field(default_factory=dict)
    hours_by_day: Dict[int, int] = Field(default_factory=dict)
    staff: List[StaffSetupSummary] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
