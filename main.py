from fastapi import FastAPI
import uvicorn

from api.dependencies import BotStore, Settings, load_settings
from api.logger import configure_logging
from api.responses import register_error_handlers
from api.routes import router


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Trading Bot API")
    app.state.settings = settings
    app.state.bot_store = BotStore(settings.default_position_size)

    register_error_handlers(app)
    app.include_router(router)
    return app


# Serverless hosts (Vercel) look for a module-level "app"
app = create_app()

if __name__ == "__main__":
    uvicorn.run(app)
