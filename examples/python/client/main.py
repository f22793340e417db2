import asyncio
import logging
import os
from pathlib import Path

import httpx
from dotenv import load_dotenv

from x402_bch import BchServerConfig, create_signer, with_payment_interceptor
from x402_bch.logging_config import get_logger, setup_logging

setup_logging(logging.DEBUG)
logger = get_logger(__name__)

load_dotenv(Path(__file__).parent.parent.parent.parent / ".env")

PRIVATE_KEY_WIF = os.getenv("PRIVATE_KEY_WIF", "")
PAYMENT_AMOUNT_SATS = int(os.getenv("PAYMENT_AMOUNT_SATS", "2000"))
RESOURCE_SERVER_URL = os.getenv("RESOURCE_SERVER_URL", "http://localhost:4021")
ENDPOINT_PATH = os.getenv("ENDPOINT_PATH", "/weather")
RESOURCE_URL = RESOURCE_SERVER_URL + ENDPOINT_PATH

if not PRIVATE_KEY_WIF:
    print("\nError: PRIVATE_KEY_WIF not set in .env file")
    print("\nPlease add your BCH private key (WIF) to .env file\n")
    exit(1)


async def main():
    server_config = BchServerConfig.from_env()
    signer = create_signer(PRIVATE_KEY_WIF, PAYMENT_AMOUNT_SATS)

    print("Initializing x402 BCH client...")
    print(f"  Resource: {RESOURCE_URL}")
    print(f"  Client Address: {signer.get_address()}")
    print(f"  BCH server: {server_config.bch_server_url} ({server_config.resolve_funding_mode()})")

    async with httpx.AsyncClient(timeout=60.0) as http_client:
        client = with_payment_interceptor(http_client, signer, server_config)

        print(f"\nRequesting: {RESOURCE_URL}")
        try:
            response = await client.get(RESOURCE_URL)
            print("\nSuccess!")
            print(f"Status: {response.status_code}")

            payment_response = response.headers.get("payment-response") or response.headers.get(
                "x-payment-response"
            )
            if payment_response:
                print(f"Payment Response: {payment_response}")

            cache = client.utxo_cache
            print(f"UTXO: {cache.txid}:{cache.vout} ({cache.sats_left} sats left)")

            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                print(f"\nResponse: {response.json()}")
            else:
                print(f"\nResponse (first 200 chars): {response.text[:200]}")
        except Exception as e:
            logger.exception("Request failed")
            print(f"\nError: {e}")


if __name__ == "__main__":
    asyncio.run(main())
