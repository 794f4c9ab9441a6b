from pydantic import BaseModel


class JobSubmittedResponse(BaseModel):
    jobId: str
    status: str
    message: str
