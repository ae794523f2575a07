import logging

from rich import print
from rich.logging import RichHandler
import uvicorn

from khrecipes.app import CONFIG, app


def status(value: str | None) -> str:
    return "[green]Set ✓[/green]" if value else "[red]NOT SET ✗[/red]"


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    print(f"🍳 KH Recipes server running at http://{CONFIG.host}:{CONFIG.port}")
    print(f"   Storage: {'S3' if CONFIG.use_s3 else 'Local file'}")
    print(f"   Passkey: {status(CONFIG.passkey)}")
    print(f"   OpenAI API: {status(CONFIG.openai_api_key)}")
    uvicorn.run(app, host=CONFIG.host, port=CONFIG.port, log_config=None)


if __name__ == "__main__":
    main()
