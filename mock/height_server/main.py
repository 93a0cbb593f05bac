from fastapi import FastAPI
from pydantic import BaseModel, Field

app = FastAPI(title="Mock Height Server", version="1.0.0")
state = {"height": 0}


class Advance(BaseModel):
    blocks: int = Field(1, ge=0)


@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/height")
def get_height(): return {"height": state["height"]}

@app.post("/height/advance")
def advance(body: Advance):
    state["height"] += body.blocks
    return {"height": state["height"]}
