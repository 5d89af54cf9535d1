"""Report a rising counter every five seconds for twenty seconds.

Run a UDP listener first to see the messages, e.g. ``nc -ul 8125``.
"""

import itertools
import logging
import time

from hastur import ClientConfig, HasturClient, HasturHandler, Interval


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    with HasturClient(ClientConfig.from_env()) as hastur:
        logging.getLogger().addHandler(HasturHandler(hastur))
        hastur.start()

        ticks = itertools.count(1)
        hastur.every(Interval.FIVE_SECS, lambda: hastur.counter("foo", next(ticks)))

        with hastur.timed("example.sleep"):
            time.sleep(20)
        logging.getLogger("example").info("done after %d ticks", next(ticks) - 1)


if __name__ == "__main__":
    main()
