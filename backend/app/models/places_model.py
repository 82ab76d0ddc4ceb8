from pydantic import BaseModel

class Place(BaseModel):
    id: str
    name: str
    location: str
    type: str

class Coordinates(BaseModel):
    lat: float
    lng: float

class ErrorResponse(BaseModel):
    error: str

class NotFoundResponse(BaseModel):
    message: str
