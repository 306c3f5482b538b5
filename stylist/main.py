import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stylist import __version__
from stylist.config import logger
from stylist.routers import router
from stylist.services.session import StylistSession

# Initialize FastAPI application
app = FastAPI(
    title="Virtual Stylist API",
    description="Dress a person photo in a garment with Gemini image generation",
    version=__version__,
)

# Single local session, lost on restart
app.state.session = StylistSession()

app.include_router(router)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


logger.info("Virtual Stylist API initialized successfully")


if __name__ == "__main__":
    uvicorn.run("stylist.main:app", host="127.0.0.1", port=8000)
