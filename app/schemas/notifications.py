from pydantic import BaseModel


class QueueStatsResponse(BaseModel):
    pending_count: int
    in_flight_count: int
    succeeded: int
    retried: int
    failed: int

    class Config:
        from_attributes = True
