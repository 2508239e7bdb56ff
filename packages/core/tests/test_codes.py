"""CodeGenerator 单元测试

测试内容：
1. 生成编码格式
2. 格式校验
3. 登记/释放/回填
4. 尝试次数耗尽
5. 并发生成不重复
"""

import random
import threading

import pytest
from tasktree.core.codes import CODE_PATTERN, CodeGenerator
from tasktree.core.exceptions import CodeGenerationExhaustedError


class FirstChoice:
    """总是返回序列首元素的随机源，每次只能产出 AA-00-0000"""

    def choice(self, seq: str) -> str:
        return seq[0]


class TestGenerate:
    """编码生成测试"""

    def test_generated_code_format(self):
        gen = CodeGenerator()
        for _ in range(200):
            code = gen.generate()
            assert len(code) == 10
            assert CODE_PATTERN.fullmatch(code)
            assert CodeGenerator.validate_format(code)

    def test_generated_codes_distinct(self):
        gen = CodeGenerator(rng=random.Random(42))
        codes = [gen.generate() for _ in range(500)]
        assert len(set(codes)) == 500

    def test_generate_skips_issued_codes(self):
        gen = CodeGenerator(rng=FirstChoice())
        gen.register("AA-00-0000")
        with pytest.raises(CodeGenerationExhaustedError):
            gen.generate()

    def test_generate_skips_reserved_codes(self):
        gen = CodeGenerator(max_attempts=5, rng=FirstChoice())
        assert gen.generate() == "AA-00-0000"
        with pytest.raises(CodeGenerationExhaustedError) as exc_info:
            gen.generate()
        assert exc_info.value.attempts == 5
        assert "after 5 attempts" in exc_info.value.message

    def test_release_makes_code_available_again(self):
        gen = CodeGenerator(max_attempts=3, rng=FirstChoice())
        code = gen.generate()
        gen.release(code)
        assert gen.generate() == code

    def test_concurrent_generate_never_collides(self):
        gen = CodeGenerator()
        results: list[str] = []
        lock = threading.Lock()

        def worker():
            local = [gen.generate() for _ in range(200)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 1600
        assert len(set(results)) == 1600


class TestValidateFormat:
    """格式校验测试"""

    @pytest.mark.parametrize("code", ["AB-12-cd34", "ZZ-99-0000", "QX-07-a9k2"])
    def test_valid(self, code: str):
        assert CodeGenerator.validate_format(code)

    @pytest.mark.parametrize(
        "code",
        [
            "",
            "AB-12-cd3",  # 过短
            "AB-12-cd345",  # 过长
            "ab-12-cd34",  # 小写前缀
            "AB-1X-cd34",  # 数字段含字母
            "AB-12-CD34",  # 后缀大写
            "AB_12_cd34",  # 分隔符错误
            "AB12-cd34-",
            "AB-12-cd3!",
        ],
    )
    def test_invalid(self, code: str):
        assert not CodeGenerator.validate_format(code)

    @pytest.mark.parametrize("value", [None, 123, b"AB-12-cd34"])
    def test_non_string(self, value):
        assert not CodeGenerator.validate_format(value)


class TestRegistry:
    """登记表测试"""

    def test_register_and_exists(self):
        gen = CodeGenerator()
        assert not gen.exists("AB-12-cd34")
        gen.register("AB-12-cd34")
        assert gen.exists("AB-12-cd34")

    def test_register_malformed_is_ignored(self):
        gen = CodeGenerator()
        gen.register("not-a-code")
        assert not gen.exists("not-a-code")
        assert gen.issued_codes == frozenset()

    def test_reserved_code_not_reported_as_existing(self):
        gen = CodeGenerator()
        code = gen.generate()
        assert not gen.exists(code)
        gen.register(code)
        assert gen.exists(code)

    def test_load_skips_malformed(self):
        gen = CodeGenerator()
        loaded = gen.load(["AB-12-cd34", "bogus", "CD-34-ef56"])
        assert loaded == 2
        assert gen.issued_codes == {"AB-12-cd34", "CD-34-ef56"}

    def test_clear(self):
        gen = CodeGenerator()
        gen.register("AB-12-cd34")
        gen.clear()
        assert not gen.exists("AB-12-cd34")
