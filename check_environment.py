#!/usr/bin/env python3
"""暗色模式检测 - 检查环境和依赖"""

import sys
from pathlib import Path


def check_python_version():
    """检查 Python 版本"""
    print("🐍 检查 Python 版本...")
    version = sys.version_info
    if version.major == 3 and version.minor >= 10:
        print(f"  ✅ Python {version.major}.{version.minor}.{version.micro}")
        return True
    else:
        print(f"  ❌ Python {version.major}.{version.minor}.{version.micro} (需要 >= 3.10)")
        return False


def check_dependencies():
    """检查依赖包"""
    print("\n📦 检查依赖包...")

    dependencies = {
        "playwright": "浏览器自动化",
        "bs4": "BeautifulSoup 静态页面解析",
        "numpy": "数值计算（亮度计算）",
    }

    all_ok = True

    for package, description in dependencies.items():
        try:
            module = __import__(package)
            version = getattr(module, "__version__", "unknown")
            print(f"  ✅ {package} ({description}): {version}")
        except ImportError:
            print(f"  ❌ {package} ({description}): 未安装")
            all_ok = False

    return all_ok


def check_playwright():
    """检查 Playwright 浏览器"""
    print("\n🚗 检查 Playwright 浏览器...")

    try:
        import subprocess

        from playwright.sync_api import sync_playwright  # noqa: F401

        print("  ✅ Playwright 已安装")

        result = subprocess.run(
            ["playwright", "--version"],
            capture_output=True,
            text=True,
            timeout=5,
        )

        if result.returncode == 0:
            print(f"  ✅ {result.stdout.strip()}")
            print("  💡 如果未安装浏览器，请运行: playwright install chromium")
        else:
            print("  ⚠️  Playwright CLI 不可用")
        return True

    except ImportError:
        print("  ❌ Playwright 未安装")
        print("  💡 安装方法:")
        print("     pip install playwright")
        print("     playwright install chromium")
        return False
    except Exception as e:
        print(f"  ⚠️  检查失败: {e}")
        return True


def check_config_file():
    """检查配置文件"""
    print("\n📄 检查配置文件...")

    config_file = Path("config.json")

    if not config_file.exists():
        print("  ❌ config.json 不存在")
        print("  💡 可以复制 config.example.json 作为起点")
        return False

    try:
        from darkmode_detection.config import load_config
        from darkmode_detection.errors import ConfigError
    except ImportError as e:
        print(f"  ❌ 导入失败: {e}")
        return False

    try:
        config = load_config(config_file)
    except ConfigError as e:
        print(f"  ❌ 配置文件错误: {e}")
        return False

    print("  ✅ 配置文件格式正确")
    if not config.target_urls:
        print("  ⚠️  未配置 targetUrl / targetUrls")
        return False
    print(f"  ✅ 目标网址: {len(config.target_urls)} 个")
    return True


def check_detector():
    """检查检测模块"""
    print("\n🔍 检查检测模块...")

    try:
        from darkmode_detection import DarkModeDetector
        from darkmode_detection.markup import MarkupPage
    except ImportError as e:
        print(f"  ❌ 导入失败: {e}")
        print("  💡 请确保已安装项目: pip install -e .")
        return False

    detector = DarkModeDetector()
    print(f"  ✅ DarkModeDetector 可用 (规则集版本 {detector.catalog.version}, {len(detector.catalog)} 条规则)")
    kinds = detector.available_kinds()
    print(f"  ✅ 支持的信号类型: {len(kinds)} 个")
    for kind in kinds:
        print(f"     - {kind.value}")

    result = detector.detect(MarkupPage('<html class="dark"><body></body></html>'))
    print(f"  ✅ 离线样例检测: 置信度 {result.confidence.value}, 当前主题 {result.current_theme}")
    return True


def check_browser_launch():
    """测试 Playwright 浏览器启动"""
    print("\n🌐 测试浏览器启动...")

    try:
        from playwright.sync_api import sync_playwright

        print("  🔄 正在启动 Chromium...")

        with sync_playwright() as p:
            browser = p.chromium.launch(headless=True)
            page = browser.new_page()
            page.goto("about:blank")
            browser.close()

        print("  ✅ 浏览器启动成功")
        return True

    except Exception as e:
        print(f"  ❌ 浏览器启动失败: {e}")
        print("  💡 请运行: playwright install chromium")
        return False


def main():
    """主函数"""
    print("\n" + "=" * 80)
    print("🔧 暗色模式检测环境检查")
    print("=" * 80)

    checks = [
        ("Python 版本", check_python_version),
        ("依赖包", check_dependencies),
        ("Playwright", check_playwright),
        ("配置文件", check_config_file),
        ("检测模块", check_detector),
        ("浏览器启动", check_browser_launch),
    ]

    results = {}

    for name, check_func in checks:
        try:
            results[name] = check_func()
        except Exception as e:
            print(f"\n❌ {name} 检查时发生错误: {e}")
            results[name] = False

    print("\n" + "=" * 80)
    print("📊 检查结果汇总")
    print("=" * 80)

    for name, result in results.items():
        status = "✅" if result else "❌"
        print(f"{status} {name}")

    passed = sum(1 for r in results.values() if r)
    total = len(results)

    print(f"\n通过: {passed}/{total}")

    if passed == total:
        print("\n🎉 所有检查通过！可以运行检测程序")
        print("\n运行命令: python browser_automation.py")
    else:
        print("\n⚠️  部分检查未通过，请根据提示解决问题")

    print("=" * 80 + "\n")


if __name__ == "__main__":
    main()
