from pydantic import BaseModel


class ReportOut(BaseModel):
    total_capacity: int
    total_occupied: int
    total_registrations: int
    by_status: dict[str, int]

    class Config:
        from_attributes = True
