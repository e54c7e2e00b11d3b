from pydantic import BaseModel


class OrganizerReportOut(BaseModel):
    total_events: int
    total_capacity: int
    total_registered: int
    total_confirmed: int

    class Config:
        from_attributes = True
