import asyncio
import sys

from filestore.config import settings
from filestore.storage import FileClient
from filestore.exceptions import FileClientError

# Manual smoke test against the file service configured in .env
# Usage: python test.py [path] [key]
path = sys.argv[1] if len(sys.argv) > 1 else "test.pdf"
key = sys.argv[2] if len(sys.argv) > 2 else "test.pdf"


async def main():
    async with FileClient.from_settings(debug_responses=True) as client:
        try:
            stored_key = await client.put_file(key, path)
            print(f"File uploaded successfully as {stored_key}!")

            # Get the public URL
            url = await client.get_file(stored_key)
            print(f"Public URL: {url}")

            deleted_key = await client.delete_file(stored_key)
            print(f"Deleted: {deleted_key}")

        except FileClientError as e:
            print(f"Error against {settings.FILE_SERVICE_URL}: {e}")


asyncio.run(main())
