"""
A server that answers requests with a dedicated, bounded thread pool.

By default the application runs in the twisted reactor's shared thread pool.
Handing the server its own pool limits how many requests touch the disk at
the same time, connections beyond that wait for a free worker.

> warren-client /about.txt --port 7070
"""

from twisted.python.threadpool import ThreadPool

from warren import GopherServer, StaticGopherApplication

app = StaticGopherApplication(
    root_directory="/var/gopher",
    hosts=["localhost", "gopher.example.com"],
    port=7070,
)


if __name__ == "__main__":
    pool = ThreadPool(minthreads=1, maxthreads=4, name="warren")
    server = GopherServer(app, host="", port=7070, threadpool=pool)
    server.run()
