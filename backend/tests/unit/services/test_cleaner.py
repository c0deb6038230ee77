"""
Unit tests for the HTML cleaner.
"""
from vc_dossier.services.cleaner import HTMLCleaner

PAGE = """
<html>
<head>
  <title> Team | Acme Ventures </title>
  <style>.x { color: red; }</style>
  <script>window.track('page');</script>
</head>
<body>
  <!-- navigation -->
  <nav><a href="/team">Team</a> <a href="#top">Top</a></nav>
  <h1>Our   Team</h1>
  <svg><path d="M0 0"/></svg>
  <p>Jane Doe is the <b>Managing Partner</b>.</p>
  <a href="https://www.linkedin.com/in/jane-doe">Jane on LinkedIn</a>
  <a href="/team">Team again</a>
  <a href="mailto:jane@acmevc.in">Email</a>
  <a href="tel:+9100000000">Call</a>
  <a href="bio.html">Relative</a>
  <a href="https://acme.vc/long">{long_text}</a>
  <noscript>Enable JavaScript</noscript>
</body>
</html>
""".replace("{long_text}", "x" * 300)


def test_clean_extracts_title_and_text():
    page = HTMLCleaner().clean(PAGE, "https://acme.vc/people")

    assert page.title == "Team | Acme Ventures"
    assert "Our Team" in page.plain_text
    assert "Jane Doe is the Managing Partner" in page.plain_text
    assert "window.track" not in page.plain_text
    assert "Enable JavaScript" not in page.plain_text
    assert "<svg" not in page.cleaned_html
    assert "navigation" not in page.cleaned_html
    assert ">\n" not in page.cleaned_html


def test_clean_extracts_absolute_unique_links():
    page = HTMLCleaner().clean(PAGE, "https://acme.vc/people")
    urls = [link.url for link in page.links]

    assert urls == [
        "https://acme.vc/team",
        "https://www.linkedin.com/in/jane-doe",
        "https://acme.vc/long",
    ]
    assert page.links[0].text == "Team"
    assert len(page.links[2].text) == 200


def test_clean_handles_empty_html():
    page = HTMLCleaner().clean("", "https://acme.vc")

    assert page.title == "Untitled"
    assert page.plain_text == ""
    assert page.links == []
