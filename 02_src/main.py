"""Main entry point for the MQTT graph bridge."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from mqtt_bridge.api import create_fastapi_app
from mqtt_bridge.logging_config import setup_logging
from sim import Sim


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))
    api_url = f"http://{api_host}:{api_port}"

    # Simulated devices publish on the topic the source listens to
    sim = Sim(api_url=api_url, topic=os.getenv("SOURCE_TOPIC", "sensors/readings"))

    from mqtt_bridge.api.routes import control
    control.set_sim_instance(sim)

    app = create_fastapi_app()

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_level="info",
        log_config=None,
    )


if __name__ == "__main__":
    main()
