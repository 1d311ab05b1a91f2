from src.clients.player import MediaPlayer

class FakeHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def cancelled(self):
        return self._cancelled

class FakeLoop:
    """Just enough of an event loop: a settable clock and call_later."""

    def __init__(self, now=0.0):
        self.now = now
        self.timers = []

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, callback, args)
        self.timers.append(handle)
        return handle

    def pending(self):
        return [h for h in self.timers if not h.cancelled()]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [h for h in self.pending() if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.timers.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target

class FakePlayer(MediaPlayer):
    def __init__(self):
        super().__init__()
        self.source = None
        self.position = 0.0
        self.playing = False
        self.calls = []

    def load(self, source):
        self.source = source
        self.position = 0.0
        self.playing = False
        self.calls.append(("load", source))
        self._notify("on_duration", 60.0)

    def play(self):
        self.calls.append(("play",))
        if not self.playing:
            self.playing = True
            self._notify("on_play")

    def pause(self):
        self.calls.append(("pause",))
        if self.playing:
            self.playing = False
            self._notify("on_pause")

    def seek(self, seconds):
        self.calls.append(("seek", seconds))
        self.position = seconds
        self._notify("on_seek", seconds)

    def get_current_time(self):
        return self.position

    def count(self, name):
        return sum(1 for c in self.calls if c[0] == name)
