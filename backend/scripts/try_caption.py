#!/usr/bin/env python3
"""Caption a local image with the configured provider. Run from backend/: python scripts/try_caption.py photo.jpg"""

import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

backend = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(backend / "src"))

from captioner.config import get_settings
from captioner.services.providers.registry import get_caption_provider
from captioner.services.upload import read_upload


def main():
    if len(sys.argv) != 2:
        print("usage: python scripts/try_caption.py <image>")
        sys.exit(2)
    path = Path(sys.argv[1])
    image = read_upload(
        filename=path.name,
        content_type=None,
        data=path.read_bytes(),
        max_bytes=get_settings().max_upload_bytes,
    )

    print("Testing caption provider...")
    provider = get_caption_provider()
    print(f"Provider: {type(provider).__name__} ({provider.model_name})")

    out = provider.caption(image)
    print(f"Caption: {out.caption}")
    print("OK")


if __name__ == "__main__":
    main()
