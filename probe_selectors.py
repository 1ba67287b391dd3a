#!/usr/bin/env python3
"""逐条测试规则集在真实页面上的命中情况"""

import sys
from dataclasses import replace

from darkmode_detection import DEFAULT_CATALOG
from darkmode_detection.browser import BrowserSession
from darkmode_detection.catalog import TOGGLE_SELECTORS
from darkmode_detection.collector import evaluate_rule
from darkmode_detection.config import load_config
from darkmode_detection.errors import ConfigError


def probe_selectors(config_file: str = "config.json"):
    """测试规则集"""

    try:
        config = load_config(config_file)
    except ConfigError as e:
        print(f"❌ 配置文件错误: {e}")
        return

    if not config.target_urls:
        print("❌ 配置中未指定 targetUrl")
        return

    print("🧪 测试规则集\n")
    print("=" * 80)

    # 调试时总是显示浏览器窗口
    browser_config = replace(config.browser, headless=False)

    with BrowserSession(browser_config) as session:
        target_url = config.target_urls[0]
        print(f"🔗 访问: {target_url[:100]}...")
        page = session.open(target_url)

        print("\n⏸️  请手动登录或切换主题（如果需要），然后按 Enter 继续测试...")
        input()

        print(f"\n1️⃣ 测试切换控件选择器 ({len(TOGGLE_SELECTORS)} 个):\n")
        for selector in TOGGLE_SELECTORS:
            found = page.query_selector(selector)
            print(f"   {'✅' if found else '–'} {selector}")

        print(f"\n2️⃣ 逐条执行规则 (规则集版本 {DEFAULT_CATALOG.version}):\n")
        hits = 0
        for rule in DEFAULT_CATALOG:
            signal = evaluate_rule(rule, page)
            if signal is None:
                print(f"   –  [{rule.kind.value}] {rule!r}")
                continue
            hits += 1
            detail = ", ".join(f"{key}={value}" for key, value in signal.detail.items())
            print(f"   ✅ [{signal.tier.value}] {signal.kind.value}: {detail}")

        print("\n" + "=" * 80)
        print(f"📊 命中 {hits}/{len(DEFAULT_CATALOG)} 条规则")
        print("\n✅ 测试完成！按 Enter 关闭浏览器...")
        input()


if __name__ == "__main__":
    try:
        probe_selectors(sys.argv[1] if len(sys.argv) > 1 else "config.json")
    except Exception as e:
        print(f"\n❌ 测试失败: {e}")
        import traceback

        traceback.print_exc()
