from trend_detector import detect_trending_tokens, rank_mentions, scan_mentions
from ticker_resolver import DEFAULT_DICTIONARY, SymbolDictionary


def test_scan_counts_whole_words_case_insensitively(make_article):
    articles = [make_article("btc rallies", "BTC and Btc again"), make_article("eth quiet", "")]

    counts = scan_mentions(articles, ["BTC", "ETH", "SOL"])

    assert counts == {"BTC": 3, "ETH": 1}


def test_scan_does_not_match_inside_longer_tokens(make_article):
    """BETATEST must not count for BETA; a standalone BETA must."""
    assert scan_mentions([make_article("BETATEST launched")], ["BETA"]) == {}
    assert scan_mentions([make_article("BETA launched")], ["BETA"]) == {"BETA": 1}
    assert scan_mentions([make_article("ALPHABETA", "1BETA BETA2")], ["BETA"]) == {}


def test_scan_treats_punctuation_as_boundary(make_article):
    articles = [make_article("Price of $ETH, (ETH) and ETH-based tokens", "ETH.")]

    assert scan_mentions(articles, ["ETH"]) == {"ETH": 4}


def test_scan_joins_title_and_summary_with_space(make_article):
    # Without the separator the title tail and summary head would fuse into "SOLBTC".
    articles = [make_article("Buy SOL", "BTC later")]

    assert scan_mentions(articles, ["SOL", "BTC"]) == {"SOL": 1, "BTC": 1}


def test_scan_is_independent_of_article_order(make_article):
    a = make_article("BTC BTC", "ETH")
    b = make_article("SOL", "BTC")

    assert scan_mentions([a, b], ["BTC", "ETH", "SOL"]) == scan_mentions([b, a], ["BTC", "ETH", "SOL"])


def test_scan_counts_duplicates_and_aliases_under_their_own_key(make_article):
    articles = [make_article("Harmony ONE", "HARMONY upgrade")]

    counts = scan_mentions(articles, ["ONE", "HARMONY", "ONE"])

    assert counts == {"ONE": 1, "HARMONY": 2}


def test_scan_accepts_plain_dict_articles():
    counts = scan_mentions([{"title": "BTC", "summary": None}], ["BTC"])

    assert counts == {"BTC": 1}


def test_scan_handles_digit_symbols(make_article):
    counts = scan_mentions([make_article("1INCH and API3 listed", "API30 is not API3")], ["1INCH", "API3"])

    assert counts == {"1INCH": 1, "API3": 2}


def test_rank_orders_by_count_and_truncates():
    counts = {"SOL": 1, "BTC": 5, "ETH": 3, "ADA": 2, "DOGE": 4, "XRP": 6}

    assert rank_mentions(counts, 3) == ["XRP", "BTC", "DOGE"]


def test_rank_breaks_ties_by_declaration_order_not_mapping_order(small_dictionary):
    forward = {"SOL": 2, "BETA": 2, "ETH": 2, "BTC": 2}
    backward = dict(reversed(list(forward.items())))

    expected = ["BTC", "ETH", "BETA", "SOL"]
    assert rank_mentions(forward, 5, small_dictionary) == expected
    assert rank_mentions(backward, 5, small_dictionary) == expected


def test_rank_returns_fewer_than_k_without_padding():
    assert rank_mentions({"BTC": 1, "ETH": 2}, 5) == ["ETH", "BTC"]


def test_rank_empty_and_non_positive_k():
    assert rank_mentions({}, 5) == []
    assert rank_mentions({"BTC": 3}, 0) == []


def test_rank_puts_undeclared_symbols_after_declared(small_dictionary):
    counts = {"PEPE": 1, "AAA": 1, "SOL": 1}

    assert rank_mentions(counts, 5, small_dictionary) == ["SOL", "AAA", "PEPE"]


def test_rank_is_bounded_by_k_and_mentioned_symbols(make_article):
    articles = [make_article("BTC ETH SOL DOGE ADA XRP DOT LINK", "BTC ETH")]
    counts = scan_mentions(articles, DEFAULT_DICTIONARY.symbols)

    for k in range(0, 10):
        ranked = rank_mentions(counts, k)
        assert len(ranked) <= k
        assert len(ranked) <= len(counts)


def test_detect_trending_tokens_end_to_end(make_article):
    articles = [
        make_article("BITCOIN news: BTC BTC BTC", "nothing else"),
        make_article("ETH upgrade", "ETH gas fees drop"),
    ]

    assert detect_trending_tokens(articles, DEFAULT_DICTIONARY, 5) == ["BTC", "ETH"]


def test_detect_trending_tokens_on_mock_corpus_finds_nothing():
    """The fallback headlines spell out names, not tickers."""
    from hunter import get_mock_crypto_news

    assert detect_trending_tokens(get_mock_crypto_news()) == []


def test_detect_trending_tokens_uses_given_dictionary(make_article):
    dictionary = SymbolDictionary(["FOO"], {"FOO": "foo-coin"})

    assert detect_trending_tokens([make_article("FOO BTC")], dictionary) == ["FOO"]
