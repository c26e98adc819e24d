KEY_COUNT = 16


class Keypad:
    """queue of pressed hex keys, a press is consumed as soon as an instruction reads it"""

    def __init__(self):
        self.pressed_keys = []

    @staticmethod
    def _check(key):
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"The CHIP-8 keypad has no key 0x{key:x}")

    def __getitem__(self, key):
        self._check(key)
        if key in self.pressed_keys:
            self.pressed_keys.remove(key)
            return True
        return False

    def __setitem__(self, key, value):
        self._check(key)
        if value:
            if key not in self.pressed_keys:
                self.pressed_keys.append(key)
        elif key in self.pressed_keys:
            self.pressed_keys.remove(key)

    def press(self, key):
        self[key] = True

    def untouched(self):
        return len(self.pressed_keys) == 0

    def first(self):
        """get first button pressed present in the queue"""
        return self.pressed_keys.pop(0)
