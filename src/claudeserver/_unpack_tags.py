from typing import Dict, Tuple


def unpack_tags(tags: str | None) -> Tuple[Tuple[str, str], ...]:
    tags_unpacked: list[Tuple[str, str]] = []
    if tags:
        for tag in tags.split(";"):
            if not tag.strip():
                continue
            key, sep, value = tag.partition("=")
            if not sep or not key:
                raise ValueError(
                    "Tags must be in the format 'key1=value1;key2=value2', "
                    f"but instead got {tags}"
                )
            tags_unpacked.append((key, value))
    return tuple(tags_unpacked)


def tags_as_dict(tags_unpacked: Tuple[Tuple[str, str], ...]) -> Dict[str, str]:
    # later duplicates win, same as CDK's Tags.of().add()
    return {k: v for k, v in tags_unpacked}
