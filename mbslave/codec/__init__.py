"""Encoding and decoding of Modbus frames in RTU and MBAP framing."""