import uvicorn

from . import config

if __name__ == "__main__":
    uvicorn.run("trx_service.main:app", host=config.APP_HOST, port=config.APP_PORT)
