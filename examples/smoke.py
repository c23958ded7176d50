import asyncio
import logging

from llm_gateway.errors import ConfigurationError, GatewayError
from llm_gateway.factory import GatewayFactory
from llm_gateway.types import Message


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG)

    for backend in GatewayFactory.list_available_backends():
        print(f"{backend}: {'configured' if GatewayFactory.is_available(backend) else 'missing credentials'}")

    try:
        gateway = GatewayFactory.create()
    except ConfigurationError as e:
        print("Expected error:", type(e).__name__, e)
        return

    messages = [
        Message(role="system", content="Answer with a single number."),
        Message(role="user", content="What is 2 + 2?"),
    ]
    async with gateway:
        try:
            response = await gateway.send_message(messages)
        except GatewayError as e:
            print("Request failed:", type(e).__name__, e)
            return

    print("content:", response.content)
    for call in response.tool_calls:
        print("tool call:", call.name, call.parameters)


if __name__ == "__main__":
    asyncio.run(main())
