from mcping import ServerType, decode_chat_component, ping_server
import asyncio


async def main():
    result = await ping_server("tzdtwsj.top")
    if not result.status:
        print(f"Server is offline: {result.reason}")
        return

    if result.java:
        status = result.java.response
        print("######################################################################")
        print(
            f"Java server is online running version {status['version']['name']} with "
            f"{status['players']['online']} out of {status['players']['max']} players."
        )
        print(f"Message of the day: {decode_chat_component(status.get('description', ''))}")
        print(
            "Message of the day without formatting: "
            f"{decode_chat_component(status.get('description', ''), clean_color_code=True)}"
        )
        print(f"Latency: {result.java.ping_delay}ms")
        if result.java.srv_record:
            print(f"Redirected by SRV record to {result.java.srv_record}")

    if result.bedrock:
        status = result.bedrock.response
        print("######################################################################")
        print(
            f"Bedrock server is online running version {status['version']['name']} with "
            f"{status['players']['online']} out of {status['players']['max']} players."
        )
        if status["gamemode"]:
            print(f"Game mode: {status['gamemode']}")
        print(f"Message of the day: {status['description']}")
        print(f"Latency: {result.bedrock.ping_delay}ms")

    for edition, error in ((ServerType.JAVA, result.java_error), (ServerType.BEDROCK, result.bedrock_error)):
        if error:
            print(f"{edition} ping failed: {error}")

asyncio.run(main())
