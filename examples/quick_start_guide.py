#!/usr/bin/env python3
"""
Quick Start Guide for parsex.

Parses a small page, runs a few queries, edits nodes in place and prints the
rendered and pretty-printed results.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from parsex import ParserConfig, parse
from parsex.tools import PerformanceProfiler

PAGE = """<!DOCTYPE html>
<html>
  <body>
    <div id="nav" class="menu top"><a href="/">Home</a> <a href="/docs">Docs</a></div>
    <!-- <div class="ad">never parsed</div> -->
    <div id="main">
      <h1>Welcome</h1>
      <p class="lead">Short intro with <b>bold</b> text.</p>
      <p>Unclosed paragraph
    </div>
  </body>
</html>
"""


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - parsex")
    print("=" * 45)

    # Step 1: Parse
    print("\n📄 Step 1: Parsing")
    print("-" * 30)
    document = parse(PAGE)
    print(f"✅ Parsed {len(document)} nodes")
    print(f"📏 Round trip exact: {document.render() == PAGE}")
    for entry in document.diagnostics:
        print(f"   {entry.severity.name}: {entry.message}")

    # Step 2: Query
    print("\n🔍 Step 2: Queries")
    print("-" * 30)
    menu = document.query().class_("menu").first()
    print(f"Menu node: #{menu.id} <{menu.tag}> classes={menu.classes}")
    links = menu.children().tag("a").to_list()
    print(f"Links inside menu: {[link.attr('href') for link in links]}")
    lead = document.query().tag("p").class_("lead").first()
    print(f"Lead paragraph contents: {lead.contents!r}")

    # Step 3: Edit
    print("\n✏️  Step 3: Editing")
    print("-" * 30)
    for link in links:
        link.set_attr("rel", "nofollow")
    lead.set_contents("Replaced intro.")
    print(document.render_subtree(0).strip())

    # Step 4: Pretty rebuild
    print("\n🧹 Step 4: Pretty rebuild")
    print("-" * 30)
    print(parse(PAGE, ParserConfig.pretty(indent=4)).rebuild())

    # Step 5: Profiling
    print("\n⏱️  Step 5: Profiling")
    print("-" * 30)
    profiler = PerformanceProfiler()
    with profiler.profile_session("quick_start", len(PAGE)) as session:
        with profiler.profile_layer(session, "tokenization"):
            profiled = parse(PAGE)
        with profiler.profile_layer(session, "render"):
            profiled.render()
    for recommendation in profiler.get_optimization_recommendations(
        profiler.generate_report()
    ):
        print(f"💡 {recommendation}")


if __name__ == "__main__":
    quick_start_example()
