import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crowdsense.config import load_settings
from crowdsense.routers import uplinks

settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="Crowd sensor uplink decoder")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(uplinks.router)

@app.get("/health")
def health():
    return {"ok": True}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("crowdsense.main:app", host="0.0.0.0", port=8000, reload=True)
