from __future__ import annotations

from serial_guard.java import LexicalRules, mask_comments_and_strings, scan_tokens


def test_masking_preserves_length_and_line_count() -> None:
    source = 'int a = 1; // class Hidden\nString s = "class X";\n/* multi\nline */ class Real {}\n'

    masked = mask_comments_and_strings(source)

    assert len(masked) == len(source)
    assert masked.count("\n") == source.count("\n")
    assert "Hidden" not in masked
    assert "class X" not in masked
    assert "multi" not in masked
    assert "class Real" in masked


def test_masking_honours_escaped_quotes_and_text_blocks() -> None:
    source = 'String a = "say \\"class Q\\"";\nString b = """\nclass T\n""";\nclass After {}\n'

    masked = mask_comments_and_strings(source)

    assert "Q" not in masked
    assert "class T" not in masked
    assert "class After" in masked


def test_custom_rules_can_disable_block_comments() -> None:
    rules = LexicalRules(block_comment_pairs=())

    masked = mask_comments_and_strings("/* class Kept */", rules)

    assert "class Kept" in masked


def test_scan_tokens_reports_one_based_positions() -> None:
    tokens = scan_tokens("class A {\n  @Mark\n}")

    assert [(token.text, token.line, token.start_col) for token in tokens] == [
        ("class", 1, 1),
        ("A", 1, 7),
        ("{", 1, 9),
        ("@", 2, 3),
        ("Mark", 2, 4),
        ("}", 3, 1),
    ]
    assert tokens[0].is_identifier
    assert not tokens[2].is_identifier
