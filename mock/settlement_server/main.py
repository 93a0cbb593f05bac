from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="Mock Settlement Server", version="1.0.0")
received = []

@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/mock-ledger/events")
def events(): return {"events": received}

@app.post("/mock-ledger")
async def mock_ledger(request: Request, mode: str = "ok"):
    payload = await request.json()
    if mode == "fail":
        return JSONResponse(content={"status": "error", "received": payload}, status_code=500)
    received.append(payload)
    return {"status": "ok", "received": payload}
