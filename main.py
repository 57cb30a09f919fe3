"""
Entry point for running the API with uvicorn:

    uvicorn main:app --reload
"""
import uvicorn

from tms.main import app


@app.get("/")
async def root():
    return {"message": "Aarohi Task Management System API is running"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
