"""Example showing a signed and encrypted request/response exchange."""

import asyncio

from mutualjose import EnvelopeOrchestrator, MutualJoseError, load_config


async def main():
    """Seal a payload for the server and open the server's answer."""
    # Key set locations come from mutualjose.yaml or the environment
    config = load_config()
    orchestrator = EnvelopeOrchestrator.from_config(config)

    if config.server_key_set_location and orchestrator.source.is_url(
        config.server_key_set_location
    ):
        reachable = await orchestrator.check_url_is_valid(config.server_key_set_location)
        print(f"🔗 Server key set reachable: {reachable}")

    try:
        envelope = await orchestrator.encrypt({"amount": 100, "currency": "USD"})
    except MutualJoseError as e:
        print(f"❌ Could not seal payload: {e}")
        return

    print(f"✅ Envelope ready ({len(envelope)} chars)")
    print(f"📦 {envelope[:60]}...")

    # A server answer would be opened the same way:
    #   result = await orchestrator.decrypt(response_body)
    #   print(result.payload, result.header["kid"])


if __name__ == "__main__":
    asyncio.run(main())
