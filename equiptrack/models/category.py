from sqlmodel import SQLModel


class Category(SQLModel):
    id: str
    name: str
    color: str = "#999999"
