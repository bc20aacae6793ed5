"""Infrastructure layer: HTTP transport, external API clients and stream engine"""
