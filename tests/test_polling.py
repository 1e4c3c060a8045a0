from supermac.polling import wait_for


def test_wait_for_succeeds_on_later_attempt(monkeypatch):
    sleeps = []
    monkeypatch.setattr("time.sleep", sleeps.append)
    answers = iter([False, False, True])

    result = wait_for(lambda: next(answers), attempts=5, interval=0.5)

    assert result.succeeded
    assert result.attempts == 3
    assert sleeps == [0.5, 0.5, 0.5]


def test_wait_for_times_out_without_raising(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)

    result = wait_for(lambda: False, attempts=4)

    assert result.timed_out
    assert result.attempts == 4
