import threading

from stall_recovery.looper import Looper

from conftest import ManualClock, move_time_forward


def test_messages_run_in_post_order(looper):
    seen = []
    looper.post(seen.append, "a")
    looper.post(seen.append, "b")
    looper.post(seen.append, "c")

    assert looper.run_pending() == 3
    assert seen == ["a", "b", "c"]

def test_delayed_message_waits_for_due_time(looper, clock):
    seen = []
    looper.post_delayed(5, seen.append, "late")

    looper.run_pending()
    assert seen == []
    assert looper.next_due() == clock.now + 5

    clock.now += 5
    looper.run_pending()
    assert seen == ["late"]

def test_earlier_due_runs_first(looper, clock):
    seen = []
    looper.post_delayed(2, seen.append, "timer")
    clock.now += 1
    looper.post(seen.append, "event")

    clock.now += 5
    looper.run_pending()

    assert seen == ["event", "timer"]

def test_cancelled_message_never_runs(looper, clock):
    seen = []
    msg = looper.post_delayed(1, seen.append, "ghost")
    msg.cancel()

    move_time_forward(looper, clock, 5)

    assert seen == []
    assert looper.pending() == 0
    assert looper.next_due() is None

def test_messages_posted_while_running_are_processed(looper):
    seen = []

    def first():
        seen.append("first")
        looper.post(seen.append, "second")

    looper.post(first)
    looper.run_pending()

    assert seen == ["first", "second"]

def test_handler_exception_does_not_stop_queue(looper):
    seen = []

    def boom():
        raise RuntimeError("bad handler")

    looper.post(boom)
    looper.post(seen.append, "after")
    looper.run_pending()

    assert seen == ["after"]

def test_loop_runs_until_quit():
    """Real clock: loop() on a worker thread, quit() from a message"""
    looper = Looper(name="threaded")
    seen = []

    def stop():
        seen.append("stop")
        looper.quit()

    looper.post(seen.append, "start")
    looper.post_delayed(0.05, stop)

    worker = threading.Thread(target=looper.loop)
    worker.start()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert seen == ["start", "stop"]

def test_quit_discards_pending():
    looper = Looper(name="discard", clock=ManualClock())
    looper.post_delayed(10, lambda: None)

    looper.quit()

    assert looper.pending() == 0
