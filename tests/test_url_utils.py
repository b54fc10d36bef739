from briefing.utils.url_utils import absolutize, clean_url, dedup_key, normalize_url, strip_query


def test_normalize_lowercases_host_and_adds_scheme():
    assert normalize_url("HTTPS://News.CCTV.com/Path") == "https://news.cctv.com/Path"
    assert normalize_url("news.cn/a") == "https://news.cn/a"
    assert normalize_url("") == ""


def test_clean_url_drops_tracking_params():
    cleaned = clean_url("https://a.cn/x?id=1&utm_source=wx&spm=abc#top", remove_fragment=True)
    assert cleaned == "https://a.cn/x?id=1"


def test_dedup_key_collapses_equivalent_urls():
    assert dedup_key("https://A.cn/x?utm_medium=feed#frag") == dedup_key("https://a.cn/x")
    assert dedup_key("https://a.cn/x?id=1") != dedup_key("https://a.cn/x?id=2")
    assert dedup_key("   ") == ""


def test_strip_query_and_absolutize():
    assert strip_query("https://news.cctv.com/2024/05/01/ARTI.shtml?spm=1#x") == \
        "https://news.cctv.com/2024/05/01/ARTI.shtml"
    assert absolutize("//news.cctv.com/a", "https://news.cctv.com") == "https://news.cctv.com/a"
    assert absolutize("/china/", "https://news.cctv.com") == "https://news.cctv.com/china/"
    assert absolutize(None, "https://news.cctv.com") is None
