from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.server.routers.auth_routes import auth_router
from app.server.routers.parcel_routes import parcel_router
from app.server.routers.payment_routes import payment_router
from app.server.routers.rider_routes import rider_router
from app.server.routers.user_routes import user_router
from config import ALLOWED_ORIGINS, PORT, SITE_DOMAIN

app = FastAPI(title="ZapShift Server")

# Define the allowed origins
origins = [
    "http://localhost:5173",
    SITE_DOMAIN,
    # Add other origins with ZAPSHIFT_ALLOWED_ORIGINS
    *ALLOWED_ORIGINS,
]

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,  # Allows requests from these origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods (GET, POST, etc.)
    allow_headers=["*"],  # Allows all headers
)


@app.get("/", tags=["root"])
def root():
    return {"message": "success"}


# Include the routers in the main app with a prefix
app.include_router(auth_router, prefix="/auth")
app.include_router(user_router, prefix="/users")
app.include_router(parcel_router, prefix="/parcels")
app.include_router(rider_router, prefix="/riders")
app.include_router(payment_router)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
