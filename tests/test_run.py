import queue
import threading

from parseon import run, Deadline


def test_successful_result_object():
    result = run('say "hi"\nshow 1 + 1')
    assert result.ok
    assert result.to_obj() == {'success': True, 'output': ['hi', '2'], 'error': None}


def test_error_result_object_keeps_partial_output():
    result = run('say "before"\nshow missing')
    assert not result.ok
    assert result.to_obj() == {
        'success': False,
        'output': ['before'],
        'error': {'kind': 'RuntimeError', 'line': 2, 'message': "undefined variable 'missing'"},
    }


def test_lex_and_parse_errors_produce_no_output():
    lex = run('say "a"\nsay @')
    assert lex.output == []
    assert lex.error.kind == 'LexError'
    assert lex.error.line == 2

    parse = run('say "a"\nset = 1')
    assert parse.output == []
    assert parse.error.kind == 'ParseError'
    assert str(parse.error).startswith('ParseError at line 2: ')


def test_input_from_string():
    result = run('ask a\nask b\nshow a + b', '2\n3\n')
    assert result.output == ['5']


def test_input_exhausted():
    result = run('ask a\nask b', ['only one'])
    assert result.error.message == 'no input available'
    assert result.error.line == 2


def test_input_from_queue():
    answers = queue.Queue()
    answers.put('20')
    result = run('ask a\nshow a * 2\nask b', answers, input_timeout=0.01)
    assert result.output == ['40']
    assert result.error.message == 'no input available'
    assert result.error.line == 3


def test_queue_input_arriving_from_another_thread():
    answers = queue.Queue()
    threading.Timer(0.05, answers.put, args=('late',)).start()
    result = run('ask a\nsay a', answers, input_timeout=5)
    assert result.output == ['late']


def test_queue_none_marks_end_of_input():
    answers = queue.Queue()
    answers.put(None)
    result = run('ask a', answers, input_timeout=5)
    assert result.error.message == 'no input available'


def test_echo_receives_lines_as_they_are_produced():
    seen = []
    result = run('say "a"\nsay "b"\nshow 1 / 0', echo=seen.append)
    assert seen == ['a', 'b']
    assert result.output == seen


def test_cancel_before_start():
    cancel = threading.Event()
    cancel.set()
    result = run('say "never"', cancel=cancel)
    assert result.output == []
    assert result.error.message == 'execution cancelled'
    assert result.error.line == 1


def test_deadline_stops_endless_loop():
    result = run('set n = 0\nrepeat (true) do\n  n = n + 1\nend', cancel=Deadline(0.05))
    assert result.error.kind == 'RuntimeError'
    assert result.error.message == 'execution cancelled'


def test_deadline_stops_long_range_loop():
    result = run('loop i = 1 to 1000000000 do end', cancel=Deadline(0.05))
    assert result.error.message == 'execution cancelled'
    assert result.error.line == 1


def test_lark_front_end_gives_the_same_result():
    source = 'set total = 0\nloop i = 1 to 4 do total = total + i end\nsay "sum"\nshow total\nshow total / 0'
    native = run(source)
    with_lark = run(source, use_lark=True)
    assert with_lark.to_obj() == native.to_obj()


def test_debug_log_is_written(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = run('set x = 1\nkeep y = "a"', debug_level=2)
    assert result.ok
    log = (tmp_path / 'debug.txt').read_text()
    assert 'set x: number = 1' in log
    assert 'keep y: text = a' in log


def test_no_debug_log_by_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    run('say "quiet"')
    assert not (tmp_path / 'debug.txt').exists()


def test_long_operator_chain_is_evaluated():
    source = 'show ' + ' + '.join(['1'] * 3000)
    assert run(source).output == ['3000']
    assert run(source, use_lark=True).output == ['3000']


def test_long_logical_chain_is_evaluated():
    source = 'show ' + ' and '.join(['true'] * 3000) + ' or false'
    assert run(source).output == ['true']


def test_deep_nesting_is_reported_not_raised():
    parsed = run('say "a"\nshow ' + '(' * 3000 + '1' + ')' * 3000)
    assert parsed.error.kind == 'ParseError'
    assert parsed.error.message == 'expression too deeply nested'
    assert parsed.error.line == 2

    evaluated = run('say "a"\nshow ' + '- ' * 3000 + '1', use_lark=True)
    assert evaluated.output == ['a']
    assert evaluated.error.kind == 'RuntimeError'
    assert evaluated.error.message == 'expression too deeply nested'
    assert evaluated.error.line == 2


def test_cancel_interrupts_wait_for_queue_input():
    cancel = threading.Event()
    threading.Timer(0.05, cancel.set).start()
    result = run('say "waiting"\nask a', queue.Queue(), cancel=cancel)
    assert result.output == ['waiting']
    assert result.error.message == 'execution cancelled'
    assert result.error.line == 2


def test_deadline_interrupts_wait_for_queue_input():
    result = run('ask a', queue.Queue(), cancel=Deadline(0.05))
    assert result.error.message == 'execution cancelled'
