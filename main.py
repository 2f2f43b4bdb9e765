import uvicorn

from clanleague.main import app  # noqa: F401


if __name__ == "__main__":
    uvicorn.run("clanleague.main:app", host="0.0.0.0", port=8000, reload=True)
