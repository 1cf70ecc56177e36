from jitterpy.constants import JITTER_GAIN


def to_seconds(t):
    if hasattr(t, 'to_float'):
        return t.to_float()
    return float(t)


class JitterEstimator:
    """Interarrival jitter of one packet stream, RFC 3550 section 6.4.1.

    Use one estimator per measured direction. All values are in seconds.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.previous_transit_time = None
        self.jitter = 0.0

    def update(self, sent, received):
        """Feed one packet's send and receive time, return the current jitter.

        sent and received are floats (seconds) or Timestamp values.
        """
        transit = abs(to_seconds(received) - to_seconds(sent))

        if self.previous_transit_time is not None:
            delta = abs(transit - self.previous_transit_time)
            self.jitter += (delta - self.jitter) / JITTER_GAIN

        self.previous_transit_time = transit
        return self.jitter
