"""Simple entrypoint to run the Smart Closet API locally."""

import uvicorn


def main() -> None:
    uvicorn.run("server.api:app", host="0.0.0.0", port=8080, reload=False)


if __name__ == "__main__":
    main()
