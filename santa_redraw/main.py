import logging

import uvicorn

from santa_redraw.app_factory import create_app
from santa_redraw.settings import load_settings
#python -m uvicorn santa_redraw.main:app --reload --host 0.0.0.0 --port 8000

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run("santa_redraw.main:app", port=8080, host="0.0.0.0", reload=True)
