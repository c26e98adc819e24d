import unittest

from chip8.keypad import Keypad


class TestKeypad(unittest.TestCase):
    def test_press_is_consumed(self):
        keypad = Keypad()
        keypad.press(0xC)
        self.assertTrue(keypad[0xC])
        self.assertFalse(keypad[0xC])

    def test_repeated_press_is_queued_once(self):
        keypad = Keypad()
        for _ in range(100):
            keypad.press(5)
        self.assertEqual(keypad.pressed_keys, [5])
        self.assertEqual(keypad.first(), 5)
        self.assertTrue(keypad.untouched())

    def test_release(self):
        keypad = Keypad()
        keypad[3] = True
        keypad[3] = False
        self.assertTrue(keypad.untouched())

    def test_first_in_first_out(self):
        keypad = Keypad()
        keypad.press(4)
        keypad.press(2)
        self.assertFalse(keypad.untouched())
        self.assertEqual(keypad.first(), 4)
        self.assertEqual(keypad.first(), 2)
        self.assertTrue(keypad.untouched())

    def test_unknown_key(self):
        with self.assertRaises(ValueError):
            Keypad().press(0x10)


if __name__ == "__main__":
    unittest.main()
