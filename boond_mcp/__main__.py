from boond_mcp.server import initialize

if __name__ == "__main__":  # pragma: no cover
    from boond_mcp.config import get_settings

    settings = get_settings()
    server = initialize(settings)

    try:
        if settings.mcp_transport == "streamable-http":
            server.mcp.run(
                transport="streamable-http",
                host=settings.mcp_host,
                port=settings.mcp_port,
            )
        else:
            server.mcp.run()
    finally:
        server.close()
