import uvicorn

from school_mgmt import create_app
from school_mgmt.core.config import settings

# Create the FastAPI app using the create_app function
app = create_app()

if __name__ == "__main__":
    uvicorn.run("run:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
