"""
Two servers on different ports that share their gophermap cache.

Both ports serve the same directory tree, so every gophermap only needs to be
parsed once. The classification cache is kept separate, because it's keyed
by selector and each port only recognizes the entries advertised under it.

> warren-client / --port 70
> warren-client / --port 7070
"""

from twisted.internet import reactor

from warren import GophermapCache, GopherServer, StaticGopherApplication

gophermaps = GophermapCache()

apps = [
    StaticGopherApplication(
        root_directory="/var/gopher",
        hosts=["localhost", "gopher.example.com"],
        port=port,
        gophermaps=gophermaps,
    )
    for port in (70, 7070)
]


if __name__ == "__main__":
    for app in apps:
        GopherServer(app, host="", port=int(app.port)).initialize()
    reactor.run()
