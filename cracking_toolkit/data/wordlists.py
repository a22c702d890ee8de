"""
Built-in static datasets: common passwords, names, suffixes and the
Markov training corpus.
"""

COMMON_PASSWORDS = (
    'password', '123456', '12345678', 'qwerty', 'abc123', 'monkey', '1234567', 'letmein',
    'trustno1', 'dragon', 'baseball', 'iloveyou', 'master', 'sunshine', 'ashley', 'bailey',
    'shadow', '123123', '654321', 'superman', 'qazwsx', 'michael', 'football', 'password1',
    'password123', 'batman', 'login', 'admin', 'princess', 'starwars', 'solo', '1q2w3e4r',
    'passw0rd', 'welcome', 'hello', 'charlie', 'donald', 'loveme', 'hockey', 'freedom',
    'whatever', 'nicole', 'jordan', 'cameron', 'secret', 'summer', 'buster', 'ranger',
    'harley', 'dakota', 'thomas', 'robert', 'soccer', 'access', 'mustang', 'thunder',
    'taylor', 'matrix', 'william', 'corvette', 'hello1', 'maggie', 'ginger', 'hammer',
    'silver', 'anthony', 'bigdog', 'spanky', 'enter', '112233', 'andrew', 'joshua', 'andrea',
    'spider', 'peaches', 'jennifer', 'rachel', 'jasmine', 'brandon', 'george', 'daniel',
    'jessica', 'stargate', 'computer', 'samantha', 'amanda', 'cookie', 'abcdef', 'jackson',
    'maverick', 'steelers', 'cheese', 'merlin', 'testing', 'midnight', '11111111', '88888888',
    '00000000', 'internet', 'pepper', 'yankees', 'winner', 'tigger', 'orange', 'killer',
    'flower', 'service', 'canada', 'peanut', 'sparky', 'qwerty123', 'letmein1', 'welcome1',
    '1234qwer', 'monkey123', 'dragon1', 'master1', 'sunshine1', 'shadow1', 'football1',
    'baseball1', 'soccer1', 'hockey1', 'jordan23', '1qaz2wsx', 'zaq12wsx', 'qwe123',
    'p@ssw0rd', 'p@ssword', 'p@ss1234', 'ch@ngeme', 'adm1n', 'r00t', 'pa$$word',
    'Pa$$w0rd', 'passw0rd!', 'Summer2024', 'Winter2024', 'Spring2024', 'company123',
    'Company1', 'Welcome1', 'Welcome123', 'Changeme1', 'Qwerty1', '1234567890',
    'Password1', 'Password123', 'Admin123', 'Root123', 'test', 'test123', 'test1234',
    'guest', 'guest123', 'love', 'god', 'ninja', 'hunter', 'black', 'white',
    'purple', 'sammy', 'david', 'marina', 'austin', 'madison', 'dallas', 'genesis',
    'phoenix', 'angel', 'heaven', 'angel1', 'heaven1', 'newyork', 'london', 'paris',
    'tokyo', 'berlin', 'moscow', 'sydney', 'boston', 'chicago', 'denver', 'seattle',
    'january', 'february', 'march', 'april', 'june', 'july', 'august', 'september',
    'october', 'november', 'december', 'monday', 'friday', 'sunday', 'spring', 'winter',
    'autumn', 'diamond', 'platinum', 'crystal', 'emerald', 'sapphire', 'ruby', 'pearl',
    'tennis', 'swimming', 'cricket', 'rugby', 'boxing', 'guitar', 'piano', 'music',
    'melody', 'apple', 'banana', 'cherry', 'mango', 'strawberry', 'tiger', 'lion',
    'eagle', 'wolf', 'shark', 'panther', 'cobra', 'python', 'falcon', 'hawk', 'raven',
    'ferrari', 'porsche', 'mercedes', 'toyota', 'honda', 'tesla', 'minecraft', 'fortnite',
    'roblox', 'pokemon', 'mario', 'zelda', 'sonic', 'pikachu', 'xbox', 'playstation',
    'nintendo', 'gamer', 'facebook', 'twitter', 'instagram', 'google', 'amazon', 'netflix',
    'spotify', 'microsoft', 'samsung', 'america', 'liberty', 'justice', 'patriot',
    'warrior', 'champion', 'victory', 'legend', 'rocket', 'galaxy', 'cosmos', 'quantum',
    'hacker', 'cyber', 'digital', 'system', 'kernel', 'firewall', 'alpha', 'bravo',
    'delta', 'echo', 'tango', 'chocolate', 'vanilla', 'coffee', 'bitcoin', 'blockchain',
    '123', '1234', '12345', '123456789', '0000', '1111', '2222', '9999', '4321',
    'qweasd', 'q1w2e3', 'a1b2c3', 'iloveu', 'loveyou', 'missyou', 'starwars1', 'batman1',
    'superman1', 'spiderman', 'ironman', 'joker', 'gandalf', 'frodo', 'potter', 'vader',
    'skywalker', 'yoda', 'spongebob', 'pirate', 'samurai', 'knight', 'guardian',
)

KEYBOARD_ROWS = ('qwertyuiop', 'asdfghjkl', 'zxcvbnm', '1234567890')

# Short list used by the strength classifier's dictionary feature
STRENGTH_DICTIONARY = (
    'password', '123456', 'qwerty', 'admin', 'letmein', 'welcome', 'monkey', 'dragon',
    'master', 'login', 'abc123', 'iloveyou', 'trustno1', 'football', 'shadow',
    'sunshine', 'princess', 'passw0rd', 'p@ssword',
)

MARKOV_TRAINING_CORPUS = (
    'password', 'password1', 'password123', 'password!', 'Password1',
    '123456', '12345678', '123456789', '1234567890', '0987654321',
    'qwerty', 'qwerty123', 'qwertyuiop', 'qwerty1',
    'admin', 'admin123', 'admin1', 'administrator', 'admin2024',
    'letmein', 'welcome', 'welcome1', 'welcome123',
    'monkey', 'dragon', 'master', 'shadow', 'sunshine',
    'iloveyou', 'trustno1', 'princess', 'football', 'baseball',
    'batman', 'superman', 'spiderman', 'ironman',
    'michael', 'michael1', 'michael123', 'jennifer', 'jennifer1',
    'john', 'john123', 'john1', 'johnny', 'johnson',
    'smith', 'smith1', 'robert', 'robert1', 'david',
    'daniel', 'daniel1', 'james', 'james1', 'james007',
    'william', 'richard', 'joseph', 'thomas', 'charles',
    'abc123', 'abc1234', 'abcdef', 'abcd1234',
    'test', 'test123', 'test1', 'testing', 'tester',
    'hello', 'hello123', 'hello1', 'helloworld',
    'love', 'love123', 'love1', 'lovely', 'lover',
    'pass', 'pass123', 'pass1', 'passw0rd',
    'user', 'user123', 'user1', 'username',
    'changeme', 'access', 'secret', 'secret1',
    'summer2024', 'winter2024', 'spring2025', 'fall2025',
    'happy', 'happy123', 'lucky', 'lucky7', 'lucky13',
    'angel', 'angel1', 'cookie', 'flower', 'freedom',
    'thunder', 'hammer', 'hunter', 'hunter2', 'killer',
    'soccer', 'hockey', 'tennis', 'golf', 'tiger',
    'charlie', 'charlie1', 'george', 'andrew', 'ashley',
    'root', 'root123', 'admin@123', 'P@ssw0rd', 'p@ssword',
    'system', 'system1', 'server', 'mysql', 'oracle',
    'linux', 'ubuntu', 'windows', 'chrome', 'firefox',
    'password2024', 'password2025', 'admin2025',
    'user2024', 'hello2024', 'love2025', 'summer2025',
    '111111', '222222', '333333', '999999', '000000',
    '696969', '121212', '131313', '112233', '445566',
    '102030', '112358', '654321', '7654321',
    'p4ssw0rd', 'h4ck3r', 'l33t', '3l1t3', 'r00t',
    'h3llo', 't3st', '4dm1n', 'm4st3r', 's3cur1ty',
    'admin!', 'hello!', 'test!@#',
    'password@1', 'admin@1', 'user@123', 'pass!@#',
    'iloveyou123', 'letmein123', 'trustno1!', 'sunshine1',
    'chocolate', 'butterfly', 'computer', 'internet',
    'football1', 'baseball1', 'basketball', 'swimming',
) + COMMON_PASSWORDS
