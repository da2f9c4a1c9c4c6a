"""Main entry point for the Multistop Navigator.

Run FastAPI server:
    uvicorn multistop.main:app --reload
"""
if __name__ == '__main__':
    import uvicorn
    uvicorn.run("multistop.main:app", host="0.0.0.0", port=8000, reload=True)
